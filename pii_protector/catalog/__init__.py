"""Category catalog package.

The catalog is the closed, ordered set of PII categories a deployment
recognises, together with the correction table used to map oracle label
spellings onto it.  The default catalog lives in ``config/categories.yaml``.
"""
