"""
Database package: declarative models, engine lifecycle and the SQL
implementations of the domain repositories.
"""
