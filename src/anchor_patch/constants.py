"""
Constants shared across the anchor_patch package.
"""

# Span locator tuning
DEFAULT_WHITESPACE_SLACK = 50
DEFAULT_PHRASE_PREFIX_LENGTH = 30
DEFAULT_MIN_CLAUSE_LENGTH = 10
DEFAULT_LINE_BLOCK_FACTOR = 2

# Upper bound on document size accepted by the locator
DEFAULT_MAX_DOCUMENT_LENGTH = 2_000_000

# System messages appended to an annotation's thread
ACCEPTED_MESSAGE = "✓ Change accepted and applied."
REJECTED_MESSAGE = "Understood. What would you like me to suggest instead?"

# Flat-file annotation store name, relative to the document root
DEFAULT_ANNOTATIONS_FILE = ".comments.json"

# File types listed by the file-backed document store
DOCUMENT_SUFFIXES = (".md", ".json")
EXCLUDED_DIRS = ("node_modules", ".git")
