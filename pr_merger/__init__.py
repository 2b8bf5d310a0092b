"""Pull request auto-merger.

Scans a GitHub repository for open pull requests carrying a label and merges
the ones that are ready:
- every check run on the head branch completed with conclusion ``success``
- GitHub reports the pull request as mergeable

Meant to be run on a schedule; exits non-zero when any labeled pull request
could not be merged.
"""

__version__ = "1.0.0"
