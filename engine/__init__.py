"""
Conversation engine for the bank sales trainer.

Modules:
- states: Turn, enums and the read-only ConversationSnapshot
- personas: greeting + behavior catalog per difficulty/product
- prompts: system directive composition and control markers
- markers: conclusion marker detection in model replies
- llm: ChatOpenAI client via LangChain, configured from env
- agents: CustomerAgent, the completion operation
- manager: ConversationManager state machine
- wizard: TrainingSession difficulty -> product -> chat flow
"""
