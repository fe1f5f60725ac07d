"""Task-chain engine for per-folder relay passes.

Each configured folder runs an ordered chain of file operations (transfer,
verify, relocate, delete, notify). The chain is fail-fast: the first failing
step quarantines the files it was working on and ends the pass. A polling
worker repeats the walk over all folders on a fixed interval, backing off on
classified cycle-level faults.

Folders and steps run strictly one at a time. Two passes never touch the same
remote destination concurrently, which keeps remote writes whole.
"""
