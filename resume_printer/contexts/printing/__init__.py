"""
Printing Context

Responsibilities:
- Connects to the remote rendering engine and scopes one tab per attempt
- Resolves the front end origin and rewrites loopback storage requests
- Captures formatted (A4/Letter) or continuous (web) page buffers
- Merges page buffers into a single PDF and publishes it
- Retries whole attempts with randomized backoff

Owns: Browser sessions, capture, PDF assembly, retry policy
Never: Decides which resume content appears on a page
"""
