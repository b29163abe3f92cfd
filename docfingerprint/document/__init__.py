"""Format-specific document access and format dispatch."""