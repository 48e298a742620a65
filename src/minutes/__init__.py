"""
Minutes Module
------------
Meeting minutes ("atas") and their AI-generated summaries.
"""
