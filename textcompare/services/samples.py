"""Built-in sample texts for trying out a comparison."""

SAMPLE_ORIGINAL = """Release Notes - v2.3.1

Highlights
- Faster search for large files
- New inline diff panel
- Updated onboarding copy

Bug Fixes
- Fix crash when opening empty workspace
- Restore scroll position after refresh
- Correct typo in settings panel
"""

SAMPLE_MODIFIED = """Release Notes - v2.4.0

Highlights
- Faster search for large files
- New inline diff viewer
- Updated onboarding messaging
- Added keyboard shortcuts cheat sheet

Bug Fixes
- Fix crash when opening empty workspace
- Restore scroll position after refresh
- Correct typos in settings panel
- Improve tooltip contrast
"""
