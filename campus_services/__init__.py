"""
Campus Services

Student, faculty and admin facades over the registrar core, plus the
composition root that wires them to one shared registry and event bus.
"""
