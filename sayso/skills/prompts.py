"""Per-skill parameter extraction prompts.

Each prompt asks the model to turn one task description into a single
action object whose shape matches :mod:`sayso.skills.models`.
"""

CREATE_DOC_PROMPT: str = """Extract the parameters for creating a document and return JSON:
{"type": "feishu_create_doc", "params": {"title": "Title", "content": "Body", "folder_name": "Folder", "collaborators": [{"member_id": "user name or id", "perm": "edit"}]}}

Rules:
- title is required. If the user asks for "today's date" in the title, use the real date, e.g. "2024-01-15".
- perm is one of full_access (default), edit, view.
  Keywords: manage/full control -> full_access, edit/modify -> edit, view/read-only -> view.
- member_id may be a plain user name; it is resolved to an account later.
- Omit fields that the request does not mention.
"""

CREATE_FOLDER_PROMPT: str = """Extract the parameters for creating a folder and return JSON:
{"type": "feishu_create_folder", "params": {"name": "Name", "folder_name": "Parent folder"}}

Rules:
- name is required.
- folder_name is optional (the parent folder).
"""

SEND_MESSAGE_PROMPT: str = """Extract the parameters for sending a message and return JSON:
{"type": "send_message", "params": {"platform": "feishu|slack", "message_type": "text|link_card", "content": {"text": "Message", "url": "Link"}, "target_type": "user|chat|batch", "targets": ["target"]}}

Rules:
- platform: feishu (default) or slack.
- target_type: user (one person), chat (group / channel), batch (several people).
- targets: use the ids the user gave (e.g. ou_xxx, oc_xxx, C0123) or plain user names.

Placeholders (important):
- If the task description contains "needs {{doc_url}}":
  - set message_type to "link_card"
  - set content.url to "{{doc_url}}"
  - set content.text to "Please take a look at the document"
- If it contains "needs {{folder_url}}", set content.url to "{{folder_url}}".
- Copy any other {{key}} token verbatim; never invent a URL.
"""
