"""
Core package for shared configuration, logging and error types.
"""
