"""Neighborhood collaborative filtering on MovieLens-100k rating logs.

Core idea:
- Score user-user similarity by rating agreement on commonly rated movies
- Predict a rating as the mean rating of similar users who rated the movie,
  relaxing the similarity threshold until such users exist
- Rank movies by a popularity score that shrinks the mean rating toward 3
"""
