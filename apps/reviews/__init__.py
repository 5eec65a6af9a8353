"""Reviews app package.

Renters review properties and homeowners review renters once a stay is
confirmed. Each write recomputes the subject's rating aggregate in the
same transaction.
"""
