"""Walker core: records, runners, discovery, and orchestration."""
