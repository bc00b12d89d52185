"""copyfiles: copy files matching glob patterns into a target folder, retrying flaky I/O"""
__version__ = "1.0.0"
