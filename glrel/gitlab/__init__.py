"""GitLab release publishing: asset uploads and release creation."""
