"""
Tests for Corner Proxy Routing

This package contains tests for:
- Routing policies and navigation profiles
- Collision query caching and the reference collision worlds
- Graph building, linking, greedy A*, smoothing and path reuse
- The proxy follower and the CornerRouter tick loop
- End-to-end routing scenarios
"""
