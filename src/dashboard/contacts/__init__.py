"""Contact records -- inbound contact-form submissions with a "contacted" flag.

Rows are written by the public contact form; the dashboard lists them,
marks them as contacted, and deletes them.
"""
