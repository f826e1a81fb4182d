"""
Cross-module primitives: the JSON envelope, the API exception types and the
handler that turns those exceptions into responses.
"""
