"""GitHub REST client and the comment and commit services built on it."""