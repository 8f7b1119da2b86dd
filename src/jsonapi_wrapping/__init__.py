"""
Access-controlled wrappers around entities, and the behaviors that create and update
entities from JSON:API requests.
"""
