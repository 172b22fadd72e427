"""Submit reviewed Gerrit changes from the command line."""
