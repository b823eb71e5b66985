"""Prompt construction for professor recommendations."""

from collections.abc import Sequence

from professor_rag.llm.models import Message, Role
from professor_rag.vectorstore.models import ProfessorMatch

SYSTEM_PROMPT = """You are an AI assistant designed to help students find professors based on their specific queries. Your task is to provide objective and relevant information about professors from the RateMyProfessor database.

Instructions:

1. User Query Processing:
   - Analyze the Query: Understand the criteria or preferences mentioned in the student's query, such as subject expertise or teaching style.
   - Request Clarifications: If the query lacks specific details, ask the student for additional information to improve the search accuracy.

2. Retrieve Top Professors:
   - Search the Database: Use Retrieval-Augmented Generation (RAG) to search the RateMyProfessor database for professors matching the query.
   - Selection Criteria: Select the top 3 professors based on objective criteria, including ratings, relevant reviews, and subject expertise.

3. Response Construction:
   - Provide Detailed Information: For each of the top 3 professors, include:
     - Name: Full name of the professor.
     - Department: The academic department or subject area.
     - Rating: Overall rating based on user reviews.
     - Key Reviews: Summarize key reviews that objectively highlight the professor's strengths and teaching style.
   - Be Concise and Clear: Present information in a clear, organized manner, avoiding unnecessary details.

4. Formatting:
   - Use Lists: Display the information in bullet-point or numbered list format for clarity.
   - Maintain Readability: Ensure the response is straightforward and easy to understand.

5. Guidelines for Responses:
   - Accuracy: Provide accurate and current information based on available data. Do not fabricate or invent any information. If you do not have sufficient data, state this clearly.
   - Objectivity: Present information in an unbiased manner, focusing on facts rather than opinions.
   - Clarity: Use simple and precise language to convey information effectively.
   - Follow-Up: Invite the student to ask additional questions or request more details if needed.

# Response Format:
For each query, structure your response as follows:

1. A brief introduction addressing the student's specific request.
2. Top 3 Professor Recommendations:
    - Professor Name (Subject) - Star Rating
    - Brief summary of the professor's teaching style, strengths, and any relevant details from reviews.
3. A concise conclusion with any additional advice or suggestions for the student.
"""

MATCH_BLOCK_HEADER = "\n\nReturned results from vector db (done automatically):"


class ProfessorPromptTemplate:
    """Builds the outgoing chat messages for a professor query.

    The last user turn is augmented with a plain-text summary of the
    retrieved professors; earlier turns pass through untouched.
    """

    def __init__(self, system_prompt: str | None = None) -> None:
        self.system_prompt = system_prompt or SYSTEM_PROMPT

    @staticmethod
    def format_match(match: ProfessorMatch) -> str:
        """Format one professor as a block entry."""
        metadata = match.metadata
        lines = [f"Professor: {match.id}"]
        if metadata.review:
            lines.append(f"Review: {metadata.review}")
        lines.append(f"Subject: {metadata.subject}")
        lines.append(f"Stars: {metadata.stars:g}")
        return "\n" + "\n".join(lines) + "\n"

    def format_matches(self, matches: Sequence[ProfessorMatch]) -> str:
        """Format matches in provider order under the block header.

        Args:
            matches: Matches as returned by the vector store.

        Returns:
            The header followed by one entry per match. With no matches
            only the header is returned.
        """
        return MATCH_BLOCK_HEADER + "".join(self.format_match(m) for m in matches)

    def augment(self, content: str, matches: Sequence[ProfessorMatch]) -> str:
        """Append the match block to the user's message."""
        return content + self.format_matches(matches)

    def build_messages(
        self,
        conversation: Sequence[Message],
        matches: Sequence[ProfessorMatch],
    ) -> list[Message]:
        """Build the message list sent to the chat provider.

        Args:
            conversation: Non-empty incoming conversation.
            matches: Retrieved professors for the last message.

        Returns:
            System prompt, every turn but the last, then the augmented
            last turn as a user message.
        """
        *history, last = conversation
        return [
            Message(role=Role.SYSTEM, content=self.system_prompt),
            *history,
            Message.user(self.augment(last.content, matches)),
        ]
