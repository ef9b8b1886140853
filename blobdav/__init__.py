"""
blobdav - WebDAV gateway for flat blob stores
"""

__version__ = '1.0.0'
