"""Routing — an ordered table of regex routes, newest first.

Routes are registered during setup; each request scans the table until
the first route whose pattern and method both match.
"""
