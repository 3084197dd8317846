"""
Terminal client for the listing API: filter state, query serializer,
fetch/refresh controller and text rendering.
"""
