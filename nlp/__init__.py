"""
nlp/ - Message Interpretation
=============================
Turns free-form chat text into an Intent. Cheap deterministic parsers run
first; the semantic cache and the Gemini model are only consulted when
they cannot decide.
"""
