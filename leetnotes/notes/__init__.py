"""Note pipeline - message contract and request handler"""
