"""Transactional procedures over the database (typed results, no string prefixes)"""
