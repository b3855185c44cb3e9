"""Settings package for the SpaceBook project.

`base.py` contains configuration shared across environments. The `dev.py`,
`prod.py` and `test.py` modules extend it with environment specific
overrides.
"""
