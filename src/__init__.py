"""
Web Crawler System

A parallel, depth- and time-bounded crawler that counts the most popular
words across the pages it visits, with a call profiler for timing its work.
"""

__version__ = "2.0.0"
__author__ = "Alex Nguyen"
__description__ = "A parallel web crawler that reports popular words, with built-in call profiling"
