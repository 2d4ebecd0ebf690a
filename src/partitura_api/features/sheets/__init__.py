"""Sheet catalog: storage, listings, advanced search and favorites."""
