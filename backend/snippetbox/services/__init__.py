# Services package init
"""
SnippetBox — Services Layer
=============================

Service Inventory:
    - SnippetStore:  insert / get / latest against the snippets table
    - TemplateCache: page templates compiled once at startup
    - render():      buffer-then-commit page rendering
"""
