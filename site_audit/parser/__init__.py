"""site_audit.parser: разбор XML-документов sitemap."""
