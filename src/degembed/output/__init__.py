"""Result persistence: timestamped TSV/Parquet tables with provenance."""

from degembed.output.writers import timestamped_name, write_result_table

__all__ = [
    "write_result_table",
    "timestamped_name",
]
