"""Prompt templates for movie pre-production and rendering."""

SCRIPT_ANALYZER_V1 = """Analyze this movie script and extract the title, a logline (a short, one-sentence summary of the plot), a list of characters with their descriptions, and a list of scenes with their descriptions. Ensure scene numbers are sequential starting from 1.

Return a JSON object with this exact structure:
{{
  "title": "The title of the movie",
  "logline": "One-sentence summary of the plot",
  "characters": [
    {{"name": "Character name", "description": "Brief description of appearance and personality"}}
  ],
  "scenes": [
    {{"scene_number": 1, "description": "Setting and action of the scene"}}
  ]
}}

Here is the script:
---
{script}
---"""

STYLE_ANALYZER_V1 = (
    "Describe the artistic style of this image in a few keywords "
    "(e.g., 'cinematic, dark high contrast', 'vibrant cartoon', "
    "'photorealistic warm tones'). Be concise and focus on visual attributes."
)

SCENE_SUGGESTER_V1 = """You are an AI story collaborator and creative partner. Based on the following movie logline and scene breakdown, suggest 1 or 2 completely new scenes that would improve the story. These could be scenes that raise the stakes, add a plot twist, or develop a character's emotional arc.

For each suggestion provide a catchy title, a short reasoning for why it improves the story, a detailed scene description, and the scene number where it should be inserted (inserting at 3 means it becomes the new scene 3 and the old scene 3 becomes 4).

Return a JSON object with this exact structure:
{{
  "suggestions": [
    {{
      "title": "A Moment of Doubt",
      "reasoning": "Why this scene improves the story",
      "scene_description": "Detailed setting and action",
      "suggested_position": 3
    }}
  ]
}}

**Logline:** {logline}

**Current Scenes:**
{scene_list}"""

VOICE_CASTING_V1 = """You are a casting director for an animated film. Based on the following character descriptions, suggest a fictional voice actor for each one. Provide a name and a description of their vocal style (e.g., 'deep and gravelly', 'warm and empathetic', 'energetic and quirky').

Return a JSON object with this exact structure:
{{
  "casting": [
    {{"character_name": "Must be one of the provided names", "actor_name": "Fictional actor name", "vocal_style": "Vocal style"}}
  ]
}}

Characters:
{character_list}"""

VOICE_LINE_V1 = """You are a scriptwriter. Write a single, short, iconic line of dialogue for the following character. The line should be something they would likely say that captures their personality. The line should be no more than 15 words.

Character Name: {name}
Description: {description}
Voice Style: {vocal_style}

Return only the line of dialogue, without any quotation marks or prefixes."""

SCENE_ENHANCER_V1 = """You are a cinematographer and script doctor. Enhance the following scene description with more vivid visual details, suggested camera angles (e.g., 'close-up on the character's face', 'wide shot of the landscape'), and mood suggestions (e.g., 'the lighting should be dim and suspenseful'). Keep the core action of the scene the same but make it more descriptive for a storyboard artist and video generation AI. Return only the new, enhanced description.

Original description: "{description}\""""

CHARACTER_IMAGE_V1 = (
    "A cinematic, full-body portrait of a character. They are described as: "
    "{description}. Photorealistic, detailed."
)

STORYBOARD_VIDEO_V1 = (
    "A short, 3-5 second animated, looping, cinematic video clip for a movie scene. "
    "The scene is: {description}. Dramatic lighting, detailed environment. "
    "No sound or dialogue."
)

FINAL_RENDER_V1 = """Create a short, cinematic movie based on the scenes below. Each scene should transition smoothly to the next.
After the final scene, the movie must conclude with the specified 10-second end credit sequence.

**Movie Details:**
- Incorporate a background music track that fits a "{music_style}" mood.
- Include relevant ambient sounds and sound effects based on the scene descriptions.{dialogue_instruction}

**Scenes:**
---
{scene_list}
---

**End Credits Sequence (10 seconds total):**
- Background: Black screen.
- Music: Gentle, cinematic music that fades out towards the end.
- Text: Simple, clean, white, and centered.
- Timing:
  - 0s: Black screen.
  - 1s: Fade in "Created by Smart Movie Creator AI".
  - 4s: Fade in the line below: "Based on a script by The User".{reference_credit}
  - 8s: Begin fading all text to black.
  - 10s: The screen is completely black.
"""

PROMO_RENDER_V1 = """Create a high-energy, 30-second promotional trailer for a movie titled "{title}".

Movie Logline: {logline}

Key Characters:
{character_list}

Trailer requirements:
- Duration: Approximately 30 seconds.
- Pacing: Fast-paced with quick cuts between short, dynamic clips.
- Music: Epic, cinematic, and suspenseful trailer music that builds to a crescendo.
- Text Overlays: Use dynamic, bold text overlays at key moments.
- Start with an intriguing phrase from the logline.
- Introduce main characters with their names.
- End with the movie title "{title}" and the text "Coming Soon".
- Do NOT include any end credits sequence. The trailer must end on the title card.
"""

HIGH_QUALITY_IMAGE_SUFFIX = " Hyper-detailed, intricate textures, masterpiece, 8k."
HIGH_QUALITY_VIDEO_SUFFIX = " Hyper-realistic, professional concept art, masterpiece, 8k."
