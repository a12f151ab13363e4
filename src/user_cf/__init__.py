"""User-user collaborative filtering item scorer over explicit ratings.

Core idea:
- Build each user's rating vector (item -> rating) from a rating store
- Compare users with a mean-centered cosine similarity
- Keep the top-K positively similar raters of an item as its neighborhood
- Predict: target mean + similarity-weighted average of neighbors' mean offsets
"""
