"""Autovoice - Automated voices for article feeds.

Turns an RSS feed of article summaries into a podcast feed whose items
point at synthesized audio renditions of each article.
"""

__version__ = "0.1.0"
