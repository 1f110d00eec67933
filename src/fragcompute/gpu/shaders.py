"""Pre-built shader snippets for fragment compute programs."""

# Passes the quad corners straight through; pair with any compute fragment
QUAD_VERT = """
#version 330

in vec2 position;

void main() {
    gl_Position = vec4(position, 0.0, 1.0);
}
"""

# Copies the texel under each output pixel from `source` unchanged
IDENTITY_COPY_FRAG = """
#version 330

uniform sampler2D source;
out vec4 result;

void main() {
    result = texelFetch(source, ivec2(gl_FragCoord.xy), 0);
}
"""

# Writes `color` to every output pixel
CONSTANT_COLOR_FRAG = """
#version 330

uniform vec4 color;
out vec4 result;

void main() {
    result = color;
}
"""

# Helpers that make a fragment output decode exactly as float32.
# encode_float writes the IEEE-754 bytes of `val` low byte first, so the
# readback reinterpreted as little-endian float32 yields `val`.
FLOAT_PACKING_GLSL = """
const vec4 bitEnc = vec4(1., 255., 65025., 16581375.);
const vec4 bitDec = 1. / bitEnc;

vec4 EncodeFloatRGBA(float v) {
    vec4 enc = bitEnc * v;
    enc = fract(enc);
    enc -= enc.yzww * vec2(1. / 255., 0.).xxxy;
    return enc;
}

float DecodeFloatRGBA(vec4 v) {
    return dot(v, bitDec);
}

float shift_right(float v, float amt) {
    v = floor(v) + 0.5;
    return floor(v / exp2(amt));
}

float shift_left(float v, float amt) {
    return floor(v * exp2(amt) + 0.5);
}

float mask_last(float v, float bits) {
    return mod(v, shift_left(1.0, bits));
}

float extract_bits(float num, float from, float to) {
    from = floor(from + 0.5);
    to = floor(to + 0.5);
    return mask_last(shift_right(num, from), to - from);
}

vec4 encode_float(float val) {
    if (val == 0.0) return vec4(0, 0, 0, 0);
    float sign_bit = val > 0.0 ? 0.0 : 1.0;
    val = abs(val);
    float exponent = floor(log2(val));
    float biased_exponent = exponent + 127.0;
    float fraction = ((val / exp2(exponent)) - 1.0) * 8388608.0;
    float t = biased_exponent / 2.0;
    float last_bit_of_biased_exponent = fract(t) * 2.0;
    float remaining_bits_of_biased_exponent = floor(t);
    float byte4 = extract_bits(fraction, 0.0, 8.0) / 255.0;
    float byte3 = extract_bits(fraction, 8.0, 16.0) / 255.0;
    float byte2 = (last_bit_of_biased_exponent * 128.0 + extract_bits(fraction, 16.0, 23.0)) / 255.0;
    float byte1 = (sign_bit * 128.0 + remaining_bits_of_biased_exponent) / 255.0;
    return vec4(byte4, byte3, byte2, byte1);
}
"""


def with_snippet(source: str, snippet: str) -> str:
    """Insert a GLSL snippet right after the `#version` line of `source`."""
    source = source.strip()
    if source.startswith("#version"):
        version, _, body = source.partition("\n")
        return f"{version}\n{snippet.strip()}\n{body}"
    return f"{snippet.strip()}\n{source}"
