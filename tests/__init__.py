"""
Homestead Test Suite

This directory contains the tests for the Homestead provisioning core:
- Account record parsing and the members ordered set
- Account database reads, appends, atomic rewrites and locking
- uid/gid allocation, group membership and user creation
- Template tree linking
- Settings and the command line interface
"""
