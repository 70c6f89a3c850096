"""Moving values between records and named SQL arguments."""

from pgfluent.data.binding import bind, merge_bindings, scan_row

__all__ = ["bind", "merge_bindings", "scan_row"]
