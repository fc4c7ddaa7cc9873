"""
repositories/ - Data Access Layer
==================================
Repositories own the SQL for the catalog tables. They borrow connections
from the pool passed to them and return domain model objects.
"""
