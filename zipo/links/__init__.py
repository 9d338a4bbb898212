"""Link shortening and click statistics."""
