"""Standup System package.

Feature modules (sessions, marking, finalize, watcher, roster, ledger) sit on
top of small service/repository layers with a thin Flask controller on top.
"""
