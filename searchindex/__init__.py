"""
Search Index

A word-level inverted index with concurrent building, crawling and ranked search.
"""

__version__ = "1.0.0"
__author__ = "Alex Nguyen"
__description__ = "Concurrent inverted index builder, web crawler and search engine"
