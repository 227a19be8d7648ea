"""
Turnip Watcher - Monitor a subreddit and send IFTTT phone notifications.

A Python application that watches the Animal Crossing turnip marketplace
subreddits for new trades and triggers an IFTTT web hook for each one.
"""

__version__ = "1.0.0"
