"""
app/parsing package marker.
"""

from app.parsing.csv_tokenizer import build_raw_records, tokenize_csv, tokenize_line

__all__ = [
    "build_raw_records",
    "tokenize_csv",
    "tokenize_line",
]
