"""NEO Watch HTTP API"""
