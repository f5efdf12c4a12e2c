"""GitLab REST client and the note and commit services built on it."""