"""
Fixture scheduling services

Business logic that:
- Accepts domain inputs (session, tournament id, options)
- Returns report objects with to_dict() for the routes
- Owns the transaction: commits on success, rolls back on any error
"""
