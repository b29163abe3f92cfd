"""Command-line argument model and exit outcomes."""