"""User interfaces for musiclib-native."""
