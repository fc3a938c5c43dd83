"""
pacup: parse Pacstall .SRCINFO manifests and fetch their sources with
checksum verification.
"""

__version__ = "0.1.0"
