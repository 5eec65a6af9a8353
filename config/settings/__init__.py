"""Settings package for SwipeStay.

`base.py` contains the configuration shared across environments; `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
