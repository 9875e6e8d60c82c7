"""Report linter findings as Gerrit reviews, Bitbucket Server reports and GitHub Actions annotations."""

__version__ = "0.1.0"