"""Infrastructure - environment, database"""
