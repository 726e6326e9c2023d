"""
ydocs: static documentation builder.

Resolves YAML navigation manifests and cascading presets into a concrete
set of documents, then emits either cleaned Markdown or rendered HTML.
"""
