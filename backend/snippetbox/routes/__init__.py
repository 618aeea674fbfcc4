# Routes package init
"""
SnippetBox — Routes Package
=============================

What:  HTTP route handlers.

Route Inventory:
    - snippets.py:  GET  /                      (latest snippets)
                    GET  /snippet/view?id=<int> (one snippet)
                    POST /snippet/create        (insert, 303 to the new snippet)
    - health.py:    GET  /health                (service health check)

Static files are mounted at /static by the application factory.

Design Principle:
    Routes are THIN: parse the request, call the store, build template
    data, render. Storage and template failures are raised and handled by
    the global exception handlers (one 500 path).
"""
