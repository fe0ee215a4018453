"""Reply normalization: turn a model's free-text reply into typed table rows.

Submodules:
  patterns     -- compiled regex patterns and constant tuples
  classifiers  -- line classification helpers (header, separator, table-like)
  extraction   -- isolate the table-like block from a prose-wrapped reply
  tokenizer    -- split one data line into trimmed cells
  metrics      -- parse display counts like "12.3K" or "7.89万" into numbers
  schema       -- Row model and versioned positional schemas
  pipeline     -- row assembly and the main normalize() entry point
  export       -- tab-separated export for spreadsheet paste
"""
