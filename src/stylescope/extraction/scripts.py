"""
In-page snapshot scripts.

These scripts only collect raw data from the live document: tags, ids,
classes, geometry and computed values (with colors canonicalised by the
engine). Every decision about what to keep is made in Python by the
style_tree and theme modules, so the scripts stay small and the algorithms
stay testable without a browser.
"""

# Shared helpers, prepended to each snapshot script body
_HELPERS = """
    const isColorProperty = (prop) => {
        const name = prop.toLowerCase();
        return name.includes('color') && !name.includes('background');
    };

    // Every styles object read so far, normalised in one pass at the end
    const pending = [];

    const readStyles = (computed, properties) => {
        const styles = {};
        for (const prop of properties) {
            styles[prop] = computed.getPropertyValue(prop);
        }
        // Without an image the background shorthand only carries its color
        if (styles.background !== undefined && computed.backgroundImage === 'none') {
            styles.background = computed.backgroundColor;
        }
        pending.push(styles);
        return styles;
    };

    // Resolve named colors and keywords to the engine's canonical rgb()/rgba().
    // Runs only after all values are read, since the swatch element changes
    // :last-child, :empty and sibling matches while it is attached.
    const normalizeColors = () => {
        const swatch = document.createElement('div');
        swatch.style.display = 'none';
        (document.body || document.documentElement).appendChild(swatch);
        const canonical = new Map();
        try {
            for (const styles of pending) {
                for (const prop of Object.keys(styles)) {
                    const value = styles[prop];
                    if (!value || !isColorProperty(prop)) {
                        continue;
                    }
                    if (!canonical.has(value)) {
                        swatch.style.color = '';
                        swatch.style.color = value;
                        canonical.set(value, swatch.style.color ? window.getComputedStyle(swatch).color : value);
                    }
                    styles[prop] = canonical.get(value);
                }
            }
        } finally {
            swatch.remove();
        }
    };

    const identity = (element) => ({
        tag: element.tagName.toLowerCase(),
        id: element.id || null,
        classes: Array.from(element.classList || []),
    });

    const geometry = (element, computed) => {
        const rect = element.getBoundingClientRect();
        return {
            rect: { width: rect.width, height: rect.height, x: rect.x, y: rect.y },
            computedWidth: computed.width,
            computedHeight: computed.height,
            visibility: computed.visibility,
            display: computed.display,
        };
    };
"""

STYLE_SNAPSHOT_SCRIPT = """
({ root, tags, properties }) => {
""" + _HELPERS + """
    const includesTag = (tag) => tags === 'all' || tags.includes(tag);

    const ownText = (element) => {
        let text = '';
        for (const node of element.childNodes) {
            if (node.nodeType === Node.TEXT_NODE) {
                text += node.textContent;
            }
        }
        return text.replace(/\\s+/g, ' ').trim().slice(0, 100);
    };

    // Subtrees without any tag-included element are dropped here already
    const snapshot = (element) => {
        if (!element || element.nodeType !== Node.ELEMENT_NODE) {
            return null;
        }

        const children = [];
        const childElements = [
            ...element.children,
            ...(element.shadowRoot ? element.shadowRoot.children : []),
        ];
        for (const child of childElements) {
            const result = snapshot(child);
            if (result) {
                children.push(result);
            }
        }

        const node = identity(element);
        node.included = includesTag(node.tag);
        node.children = children;

        if (!node.included) {
            return children.length > 0 || element === start ? node : null;
        }

        const computed = window.getComputedStyle(element);
        const box = geometry(element, computed);
        node.rect = box.rect;
        node.visibility = box.visibility;
        node.display = box.display;
        node.text = ownText(element);
        node.styles = readStyles(computed, properties);
        return node;
    };

    const start = root === 'html' ? document.documentElement : (document.body || document.documentElement);
    const tree = snapshot(start);
    normalizeColors();
    return tree;
}
"""

THEME_SNAPSHOT_SCRIPT = """
({ zones, properties, sampleProperties, sampleSize }) => {
""" + _HELPERS + """
    const describe = (element, props) => {
        const computed = window.getComputedStyle(element);
        return Object.assign(identity(element), geometry(element, computed), {
            styles: readStyles(computed, props),
        });
    };

    const zoneData = {};
    for (const [name, selectors] of Object.entries(zones)) {
        let elements = [];
        try {
            elements = Array.from(document.querySelectorAll(selectors.join(', ')));
        } catch (e) {
            elements = [];
        }
        zoneData[name] = elements.map((el) => describe(el, properties));
    }

    const all = Array.from(document.querySelectorAll('*'));
    const stride = Math.max(1, Math.floor(all.length / sampleSize));
    const samples = [];
    for (let i = 0; i < all.length && samples.length < sampleSize; i += stride) {
        samples.push(describe(all[i], sampleProperties));
    }

    const rootElement = document.documentElement;
    const rootComputed = window.getComputedStyle(rootElement);
    const declarations = [];
    for (let i = 0; i < rootComputed.length; i++) {
        const name = rootComputed[i];
        if (name.startsWith('--')) {
            declarations.push(`${name}: ${rootComputed.getPropertyValue(name).trim()}`);
        }
    }
    const rootStyleText = [rootElement.style.cssText, declarations.join('; ')]
        .filter(Boolean)
        .join('; ');

    const rootRules = [];
    const visitRules = (rules) => {
        for (const rule of Array.from(rules)) {
            const selectors = rule.selectorText ? rule.selectorText.split(',').map((s) => s.trim()) : [];
            if (selectors.includes(':root')) {
                for (let i = 0; i < rule.style.length; i++) {
                    const name = rule.style[i];
                    if (name.startsWith('--')) {
                        rootRules.push([name, rule.style.getPropertyValue(name).trim()]);
                    }
                }
            } else if (rule.cssRules) {
                visitRules(rule.cssRules);
            }
        }
    };
    for (const sheet of Array.from(document.styleSheets)) {
        let rules = null;
        try {
            rules = sheet.cssRules;
        } catch (e) {
            // Cross-origin stylesheet
            continue;
        }
        if (rules) {
            visitRules(rules);
        }
    }

    normalizeColors();

    return {
        zones: zoneData,
        samples,
        totalElements: all.length,
        rootStyleText,
        rootRules,
        viewport: {
            width: window.innerWidth,
            height: window.innerHeight,
            devicePixelRatio: window.devicePixelRatio,
            scrollWidth: rootElement.scrollWidth,
            scrollHeight: rootElement.scrollHeight,
        },
        page: {
            title: document.title,
            url: window.location.href,
            userAgent: navigator.userAgent,
        },
    };
}
"""
