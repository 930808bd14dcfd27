"""
Blogify backend package.

A FastAPI service exposing blog posts, comments and wishlists stored in a
MongoDB database, with callers identified by Firebase ID tokens (or, in
cookie mode, self-issued JWTs).
"""
