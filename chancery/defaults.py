"""Built-in data used when nothing has been saved yet.

Sample presets get ids derived from kind + name, so every device seeding
from this catalogue produces the same ids and a later merge overwrites the
samples instead of duplicating them.
"""

from __future__ import annotations

import uuid

from chancery.models import (
    Character,
    GlobalSettings,
    PromptPreset,
    RelatedLink,
    SavedPrompt,
    SectionKind,
)

_PRESET_NAMESPACE = uuid.UUID("6f1c1f3e-4d0b-4a57-9c1e-2b8f5d0a7c31")

_SAMPLE_PRESETS: list[tuple[SectionKind, str, str]] = [
    # Outfit
    ("outfit", "Casual Outfit", "hoodie, jeans, sneakers, relaxed casual style"),
    ("outfit", "Fantasy Armor", "ornate plate armor, engraved runes, flowing cape"),
    # Pose
    ("pose", "Hero Pose", "standing tall, chest out, confident stance, looking at viewer"),
    ("pose", "Relaxed Sitting", "sitting cross-legged, relaxed shoulders, soft expression"),
    # Environment
    ("environment", "Cozy Room", "warm cozy bedroom, soft blankets, fairy lights, bookshelves"),
    ("environment", "Sci-Fi Lab", "sleek futuristic lab, holographic screens, glowing consoles"),
    # Lighting
    ("lighting", "Golden Hour",
     "golden hour lighting, warm orange and amber tones, sun low on horizon, long soft shadows, "
     "lens flare, magical hour, warm color temperature, backlit subject, glowing highlights"),
    ("lighting", "Studio Portrait",
     "professional studio lighting setup, three-point lighting, key light with soft fill light, "
     "rim light separation, softbox diffusion, even illumination, no harsh shadows, "
     "controlled lighting environment"),
    ("lighting", "Dramatic Rim",
     "dramatic rim lighting, strong backlight creating silhouette edges, high contrast chiaroscuro, "
     "moody atmosphere, dark shadows, glowing outline, cinematic lighting, volumetric light rays"),
    ("lighting", "Soft Natural",
     "soft diffused natural daylight, overcast sky lighting, gentle shadows, flattering skin tones, "
     "even ambient light, no harsh highlights, natural color balance, outdoor shade lighting"),
    ("lighting", "Neon Cyberpunk",
     "neon lighting, vibrant pink and cyan color cast, electric blue and magenta glow, reflective "
     "wet surfaces, urban night atmosphere, holographic reflections, LED accent lights, "
     "futuristic city glow"),
    ("lighting", "Candlelight",
     "warm candlelight illumination, flickering orange and amber glow, intimate romantic "
     "atmosphere, soft dancing shadows, low-key lighting, warm color temperature, cozy ambiance, "
     "fire glow"),
    ("lighting", "Moonlight",
     "cool moonlight illumination, blue-silver ethereal tones, night atmosphere, subtle soft "
     "shadows, starlight, nocturnal ambiance, cool color temperature, mystical glow"),
    ("lighting", "Window Light",
     "natural window light from side, soft directional indoor lighting, Rembrandt lighting "
     "pattern, gentle shadows on opposite side, ambient room fill, diffused daylight through "
     "curtains"),
    # Style
    ("style", "Photorealistic",
     "photorealistic rendering, hyperrealistic detail, lifelike appearance, natural skin texture "
     "and pores, realistic material properties, physically accurate lighting, indistinguishable "
     "from photograph, ultra-realistic"),
    ("style", "Digital Painting",
     "digital painting style, painterly brushstrokes visible, rich saturated color palette, "
     "artistic interpretation, professional digital art, trending on artstation, detailed "
     "illustration, masterful technique"),
    ("style", "Anime/Manga",
     "anime art style, manga aesthetic, clean crisp lineart, cel-shaded flat coloring, large "
     "expressive eyes, Japanese animation style, vibrant colors, dynamic poses, studio quality "
     "anime"),
    ("style", "Oil Painting",
     "classical oil painting style, old masters technique, rich impasto textures, museum quality "
     "fine art, Renaissance influence, visible canvas texture, glazing layers, timeless "
     "masterpiece quality"),
    ("style", "Watercolor",
     "traditional watercolor painting, soft bleeding edges, transparent color washes, "
     "wet-on-wet technique, delicate paper texture, artistic color bleeding, loose expressive "
     "style, luminous transparency"),
    ("style", "Comic Book",
     "comic book illustration style, bold black ink outlines, halftone dot shading, dynamic "
     "action composition, graphic novel aesthetic, pop art influence, vibrant flat colors, "
     "sequential art style"),
    ("style", "3D Render",
     "3D CGI render, photorealistic CGI, subsurface scattering on skin, ray traced global "
     "illumination, Octane render engine, Unreal Engine 5 quality, physically based rendering, "
     "studio lighting setup"),
    ("style", "Concept Art",
     "professional concept art, entertainment design illustration, trending on artstation and "
     "deviantart, industry standard quality, detailed environment and character design, visual "
     "development art"),
    ("style", "Fantasy Art",
     "epic fantasy art illustration, magical atmosphere with particle effects, detailed fantasy "
     "world building, dramatic composition, enchanted lighting, mythical aesthetic, book cover "
     "quality"),
    ("style", "Vintage Photo",
     "vintage photograph aesthetic, authentic film grain texture, faded muted colors, retro "
     "color grading, nostalgic 1970s feel, aged photo quality, slight vignette, analog camera "
     "look"),
    # Technical
    ("technical", "Ultra HD",
     "8k UHD resolution, ultra-detailed rendering, extremely sharp focus throughout, high "
     "definition clarity, intricate fine details visible, maximum quality output, professional "
     "grade"),
    ("technical", "Portrait Depth",
     "shallow depth of field, wide aperture f/1.4 to f/2.8, beautiful creamy bokeh background, "
     "subject tack sharp in focus, blurred background separation, portrait lens compression, "
     "85mm equivalent"),
    ("technical", "Wide Angle",
     "wide angle lens perspective, 24mm focal length equivalent, expansive environmental "
     "context, slight barrel distortion, dramatic foreground to background scale, architectural "
     "photography style"),
    ("technical", "Cinematic",
     "cinematic film composition, 35mm motion picture film look, anamorphic lens "
     "characteristics with oval bokeh, 2.39:1 aspect ratio feel, movie still quality, color "
     "graded, theatrical lighting"),
    ("technical", "Macro Detail",
     "macro photography extreme close-up, intricate microscopic details visible, razor sharp "
     "focus plane, professional macro lens, detailed texture capture, scientific precision"),
    ("technical", "Professional Photo",
     "professional photography quality, full-frame DSLR camera, perfect exposure and white "
     "balance, accurate color reproduction, editorial quality, magazine cover worthy, studio "
     "professional"),
    ("technical", "Soft Aesthetic",
     "soft focus dreamy atmosphere, gentle gaussian blur, ethereal glowing quality, diffused "
     "lighting, romantic soft-focus lens effect, hazy dreamlike ambiance, pastel tones"),
    ("technical", "High Contrast",
     "high contrast dramatic look, deep rich blacks, bright clean highlights, punchy vibrant "
     "saturated colors, bold tonal range, striking visual impact, vivid color pop"),
    # Negative
    ("negative", "Standard Quality",
     "blurry, out of focus, low quality, low resolution, pixelated, jpeg artifacts, compression "
     "artifacts, noise, grainy, poorly rendered, amateur quality"),
    ("negative", "Anatomy Fixes",
     "bad anatomy, wrong anatomy, extra limbs, missing limbs, floating limbs, disconnected "
     "limbs, deformed hands, extra fingers, fused fingers, too many fingers, missing fingers, "
     "mutated hands, malformed limbs"),
    ("negative", "Face Fixes",
     "deformed face, ugly face, disfigured features, bad eyes, crossed eyes, asymmetrical eyes, "
     "lazy eye, asymmetrical face, distorted facial features, uncanny valley, weird expression, "
     "mutation"),
    ("negative", "Clean Output",
     "watermark, signature, text overlay, logo, username, artist name, copyright notice, "
     "website URL, banner, title, caption, label, stamp, border"),
    ("negative", "Composition",
     "cropped awkwardly, out of frame, cut off at edges, bad framing, poorly composed, "
     "off-center subject, cluttered background, distracting elements, unbalanced composition"),
    ("negative", "Full Negative",
     "blurry, low quality, bad anatomy, extra limbs, deformed, disfigured, ugly, mutation, "
     "watermark, text, signature, cropped, worst quality, low resolution, jpeg artifacts, "
     "error, duplicate"),
    ("negative", "Realistic Negative",
     "cartoon, anime, illustration, painting, drawing, sketch, artwork, cgi, 3d render, "
     "digital art, unrealistic, stylized, artistic interpretation, non-photographic"),
    ("negative", "Anime Negative",
     "realistic, photorealistic, photograph, 3d render, western cartoon style, bad proportions, "
     "off-model, inconsistent style, wrong art style, semi-realistic"),
]

_SAMPLE_DEFAULTS: dict[SectionKind, str] = {
    "lighting": "soft natural lighting",
    "style": "high quality, detailed",
    "technical": "sharp focus, high resolution",
    "negative": "blurry, low quality, bad anatomy, extra limbs, watermark, text",
}


def sample_preset_id(kind: SectionKind, name: str) -> uuid.UUID:
    return uuid.uuid5(_PRESET_NAMESPACE, f"{kind}:{name.lower()}")


def sample_presets() -> list[PromptPreset]:
    """Fresh copies of the built-in preset catalogue."""
    return [
        PromptPreset(id=sample_preset_id(kind, name), kind=kind, name=name, text=text)
        for kind, name, text in _SAMPLE_PRESETS
    ]


def sample_defaults() -> dict[SectionKind, str]:
    return dict(_SAMPLE_DEFAULTS)


def sample_settings() -> GlobalSettings:
    return GlobalSettings(global_defaults=sample_defaults())


def starter_character() -> Character:
    """A ready-made character for first launch. Ids are fresh on every call."""
    return Character(
        name="Luna",
        bio=(
            "A cheerful adventurer with silver hair and bright amber eyes. She's always "
            "ready for the next journey, whether it's exploring ancient ruins or relaxing "
            "at a cozy tavern."
        ),
        notes=(
            "This is your starter character! Feel free to edit her details, add prompts, "
            "or use her as a template for your own characters."
        ),
        prompts=[
            SavedPrompt(
                title="Portrait",
                text="Luna, portrait shot",
                outfit="light traveling cloak, leather armor accents, silver pendant",
                pose="looking at viewer, slight smile, wind in hair",
                environment="soft blurred background, golden hour",
                lighting="warm sunlight from the side, soft shadows",
                style_modifiers="detailed, painterly, fantasy art style",
                technical_modifiers="high quality, sharp focus on face",
                negative_prompt="blurry, low quality, extra limbs",
            ),
            SavedPrompt(
                title="Adventure Scene",
                text="Luna exploring ancient ruins",
                outfit="explorer outfit, backpack, gloves, sturdy boots",
                pose="walking through a stone archway, torch in hand, curious expression",
                environment="ancient temple ruins, overgrown with vines, mysterious glowing runes",
                lighting="torch light casting warm glow, cool ambient light from cracks in ceiling",
                style_modifiers="cinematic, atmospheric, detailed environment",
                technical_modifiers="wide shot, depth of field",
                negative_prompt="modern elements, text, watermark",
            ),
        ],
        links=[
            RelatedLink(
                title="Perchance AI Generator",
                url_string="https://perchance.org/ai-text-to-image-generator",
            ),
            RelatedLink(
                title="Prompt Writing Tips",
                url_string="https://perchance.org/ai-photo-prompt-generator",
            ),
        ],
        character_defaults={"style": "detailed, high quality"},
    )
