"""PrintQuote - pricing backend for an on-demand 3D printing service"""
