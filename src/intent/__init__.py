"""Search intent extraction.

The intent layer asks a language model to convert a free-text search request into a strict
`SearchIntent` object, which the search layer renders into a query URL.
"""
