from stockledger.export.formatter import build_export, export_json

__all__ = ["build_export", "export_json"]
