"""HTTP API for the LeetNotes extension"""
